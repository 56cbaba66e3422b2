import unittest

from careerloop.loop.controller import (
    build_diff,
    create_loop,
    pause_loop,
    resume_loop,
    run_iteration,
    terminate_loop,
)
from careerloop.loop.models import LoopConfig
from careerloop.ats.simulator import simulate_ats
from fakes import NO_SKILLS_CV, STRONG_CV, ScriptedGenerator

JOB_DESCRIPTION = "We are hiring a backend engineer to build React and Python services."


def _new_loop(resume_text=NO_SKILLS_CV, skills=("react",), config=None):
    return create_loop(
        loop_id="loop-1",
        user_id="user-1",
        job_id="job-1",
        resume_text=resume_text,
        job_description=JOB_DESCRIPTION,
        job_skills=list(skills),
        config=config,
    )


class CreateLoopTests(unittest.TestCase):
    def test_initial_snapshot(self):
        snapshot = _new_loop()
        self.assertEqual(snapshot.phase, "idle")
        self.assertEqual(snapshot.iteration, 0)
        self.assertEqual(snapshot.history, ())
        self.assertIsNone(snapshot.termination_reason)
        self.assertEqual(snapshot.current_ats_score, simulate_ats(NO_SKILLS_CV, ["react"]).score)
        self.assertEqual(snapshot.config, LoopConfig(max_iterations=5, target_score=85, min_improvement=2))

    def test_partial_config_is_merged_over_defaults(self):
        snapshot = _new_loop(config={"max_iterations": 1, "target_score": 100})
        self.assertEqual(snapshot.config.max_iterations, 1)
        self.assertEqual(snapshot.config.target_score, 100)
        self.assertEqual(snapshot.config.min_improvement, 2)


class RunIterationTests(unittest.IsolatedAsyncioTestCase):
    async def test_single_iteration_hits_max_iterations(self):
        snapshot = _new_loop(config={"max_iterations": 1, "target_score": 100})
        generator = ScriptedGenerator([NO_SKILLS_CV])

        updated, result = await run_iteration(snapshot, JOB_DESCRIPTION, ["react"], generator)

        self.assertEqual(result.new_score, 50)
        self.assertEqual(updated.phase, "terminated")
        self.assertEqual(updated.termination_reason, "max_iterations")
        self.assertEqual(updated.iteration, 1)
        self.assertEqual(len(updated.history), 1)
        self.assertFalse(result.should_continue)

    async def test_target_reached_wins_over_max_iterations(self):
        snapshot = _new_loop(config={"max_iterations": 1})
        generator = ScriptedGenerator([STRONG_CV])

        updated, result = await run_iteration(snapshot, JOB_DESCRIPTION, ["react"], generator)

        self.assertEqual(result.previous_score, 50)
        self.assertEqual(result.new_score, 100)
        self.assertEqual(updated.phase, "terminated")
        self.assertEqual(updated.termination_reason, "target_reached")
        self.assertEqual(updated.current_resume_text, STRONG_CV)
        self.assertEqual(updated.current_ats_score, 100)

    async def test_first_iteration_never_stops_for_no_improvement(self):
        snapshot = _new_loop(config={"target_score": 100})
        generator = ScriptedGenerator([NO_SKILLS_CV])

        first, first_result = await run_iteration(snapshot, JOB_DESCRIPTION, ["react"], generator)
        self.assertEqual(first.phase, "idle")
        self.assertTrue(first_result.should_continue)
        self.assertIsNone(first.termination_reason)

        second, second_result = await run_iteration(first, JOB_DESCRIPTION, ["react"], generator)
        self.assertEqual(second.phase, "terminated")
        self.assertEqual(second.termination_reason, "no_improvement")
        self.assertEqual(second_result.termination_reason, "no_improvement")

    async def test_history_tracks_iterations_until_max(self):
        snapshot = _new_loop(config={"max_iterations": 3, "target_score": 100, "min_improvement": 0})
        generator = ScriptedGenerator([NO_SKILLS_CV])

        while snapshot.phase == "idle":
            snapshot, _ = await run_iteration(snapshot, JOB_DESCRIPTION, ["react"], generator)
            self.assertEqual(len(snapshot.history), snapshot.iteration)

        self.assertEqual(snapshot.iteration, 3)
        self.assertEqual(snapshot.termination_reason, "max_iterations")
        self.assertEqual(
            [entry.resume_version_id for entry in snapshot.history],
            ["loop-1_v1", "loop-1_v2", "loop-1_v3"],
        )
        self.assertEqual([entry.iteration for entry in snapshot.history], [1, 2, 3])

    async def test_diff_and_rationale(self):
        snapshot = _new_loop()
        generator = ScriptedGenerator([STRONG_CV])

        updated, result = await run_iteration(snapshot, JOB_DESCRIPTION, ["react"], generator)

        self.assertEqual(result.rationale, "Iteration 1: score 50 → 100 (+50)")
        self.assertEqual(
            result.diff,
            "Score: 50 → 100\n"
            "Keywords: 0% → 100%\n"
            "Sections: 75% → 100%\n"
            "Resolved: Missing section: skills; Missing keywords: react",
        )
        entry = updated.history[0]
        self.assertEqual(entry.diff, result.diff)
        self.assertEqual(entry.rationale, result.rationale)
        self.assertEqual(entry.ats_score, 100)
        self.assertIsNotNone(entry.timestamp.tzinfo)

    async def test_empty_rewrite_is_accepted_and_scored(self):
        snapshot = _new_loop(resume_text=STRONG_CV)
        generator = ScriptedGenerator([""])

        updated, result = await run_iteration(snapshot, JOB_DESCRIPTION, ["react"], generator)

        self.assertEqual(updated.current_resume_text, "")
        self.assertEqual(result.previous_score, 100)
        self.assertEqual(result.new_score, 10)
        self.assertEqual(result.rationale, "Iteration 1: score 100 → 10 (-90)")
        self.assertIn("New risks: Missing section: summary", result.diff)
        self.assertNotIn("Resolved:", result.diff)
        self.assertEqual(updated.phase, "idle")

    async def test_prompt_contents(self):
        snapshot = _new_loop()
        generator = ScriptedGenerator([STRONG_CV])
        long_description = "x" * 700

        await run_iteration(snapshot, long_description, ["react", "python"], generator)

        prompt = generator.prompts[0]
        self.assertIn("This is iteration 1 of an improvement loop.", prompt)
        self.assertIn(NO_SKILLS_CV, prompt)
        self.assertIn("- Score: 68/100", prompt)
        self.assertIn("- Keyword coverage: 50%", prompt)
        self.assertIn("- Section integrity: 75%", prompt)
        self.assertIn("- Risks: Missing section: skills; Missing keywords: react", prompt)
        self.assertIn("TARGET JOB KEYWORDS: react, python", prompt)
        self.assertIn("x" * 600, prompt)
        self.assertNotIn("x" * 601, prompt)
        self.assertIn("Do NOT invent experience", prompt)
        self.assertTrue(prompt.endswith("Output ONLY the improved CV text, no commentary."))

    async def test_prompt_reports_no_risks(self):
        snapshot = _new_loop(resume_text=STRONG_CV, skills=())
        generator = ScriptedGenerator([STRONG_CV])

        await run_iteration(snapshot, JOB_DESCRIPTION, [], generator)

        self.assertIn("- Risks: none", generator.prompts[0])

    async def test_generator_error_propagates(self):
        snapshot = _new_loop()
        generator = ScriptedGenerator([RuntimeError("provider down")])

        with self.assertRaises(RuntimeError):
            await run_iteration(snapshot, JOB_DESCRIPTION, ["react"], generator)

        self.assertEqual(snapshot.iteration, 0)
        self.assertEqual(snapshot.history, ())


class PhaseControlTests(unittest.TestCase):
    def test_pause_then_resume_restores_idle(self):
        snapshot = _new_loop()
        paused = pause_loop(snapshot)
        self.assertEqual(paused.phase, "awaiting_user")

        resumed = resume_loop(paused)
        self.assertEqual(resumed.phase, "idle")
        self.assertEqual(resumed.iteration, snapshot.iteration)
        self.assertEqual(resumed.history, snapshot.history)
        self.assertEqual(resumed.current_ats_score, snapshot.current_ats_score)

    def test_resume_on_non_paused_loop_is_noop(self):
        snapshot = _new_loop()
        self.assertIs(resume_loop(snapshot), snapshot)
        terminated = terminate_loop(snapshot)
        self.assertIs(resume_loop(terminated), terminated)

    def test_pause_is_unconditional(self):
        terminated = terminate_loop(_new_loop())
        self.assertEqual(pause_loop(terminated).phase, "awaiting_user")

    def test_terminate_sets_user_stop(self):
        paused = pause_loop(_new_loop())
        terminated = terminate_loop(paused)
        self.assertEqual(terminated.phase, "terminated")
        self.assertEqual(terminated.termination_reason, "user_stop")


class BuildDiffTests(unittest.TestCase):
    def test_unchanged_scores_have_only_delta_lines(self):
        result = simulate_ats(STRONG_CV)
        self.assertEqual(
            build_diff(result, result),
            "Score: 100 → 100\nKeywords: 100% → 100%\nSections: 100% → 100%",
        )


if __name__ == "__main__":
    unittest.main()
