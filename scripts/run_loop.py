from __future__ import annotations

import argparse
import asyncio
import logging
import sys
import uuid
from pathlib import Path

from careerloop.ai.factory import get_text_generator
from careerloop.ats.simulator import simulate_ats
from careerloop.loop.controller import create_loop, run_iteration
from careerloop.loop.models import LoopConfigOverrides
from careerloop.parsing.parse import parse_resume


def _read_resume(path: Path) -> str:
    parsed = parse_resume(path.read_bytes(), filename=path.name)
    for warning in parsed.parsing_warnings:
        print(f"warning: {warning}", file=sys.stderr)
    return parsed.raw_text


async def _run(args: argparse.Namespace) -> int:
    resume_text = _read_resume(Path(args.resume))
    job_description = Path(args.job).read_text(encoding="utf-8") if args.job else ""
    skills = [s.strip() for s in (args.skills or "").split(",") if s.strip()]

    if args.score_only:
        result = simulate_ats(resume_text, skills)
        print(f"score: {result.score}")
        print(f"keyword coverage: {result.keyword_coverage}")
        print(f"section integrity: {result.section_integrity}")
        for risk in result.risks:
            print(f"- {risk}")
        return 0

    snapshot = create_loop(
        loop_id=uuid.uuid4().hex,
        user_id="local",
        job_id=args.job_id,
        resume_text=resume_text,
        job_description=job_description,
        job_skills=skills,
        config=LoopConfigOverrides(
            max_iterations=args.max_iterations,
            target_score=args.target_score,
            min_improvement=args.min_improvement,
        ),
    )
    print(f"initial score: {snapshot.current_ats_score}")

    generator = get_text_generator()
    while snapshot.phase == "idle":
        snapshot, result = await run_iteration(snapshot, job_description, skills, generator)
        print(result.rationale)
        print(result.diff)
        print()

    print(f"stopped: {snapshot.termination_reason} after {snapshot.iteration} iteration(s)")
    if args.out:
        Path(args.out).write_text(snapshot.current_resume_text, encoding="utf-8")
        print(f"wrote {args.out}")
    return 0


def main() -> None:
    parser = argparse.ArgumentParser(description="Run the CV optimization loop against a job locally.")
    parser.add_argument("--resume", required=True, help="Resume file (.pdf, .docx or text)")
    parser.add_argument("--job", help="Job description text file")
    parser.add_argument("--job-id", default="", help="Job identifier recorded on the loop")
    parser.add_argument("--skills", help="Comma separated target keywords")
    parser.add_argument("--max-iterations", type=int, default=None)
    parser.add_argument("--target-score", type=int, default=None)
    parser.add_argument("--min-improvement", type=int, default=None)
    parser.add_argument("--out", help="Write the final CV text to this path")
    parser.add_argument(
        "--score-only",
        action="store_true",
        help="Only print the ATS simulation for the resume.",
    )
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(message)s")
    raise SystemExit(asyncio.run(_run(args)))


if __name__ == "__main__":
    main()
