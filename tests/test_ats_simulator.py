import unittest
from unittest.mock import patch

from careerloop.ats.simulator import (
    RISK_FEW_DATES,
    RISK_LONG_LINES,
    RISK_MULTI_COLUMN,
    RISK_NO_EMAIL,
    RISK_SHORT_CV,
    RISK_SPECIAL_CHARS,
    RISK_TABLE_LAYOUT,
    simulate_ats,
)
from fakes import NO_SKILLS_CV, STRONG_CV


class AtsSimulatorTests(unittest.TestCase):
    def test_complete_cv_scores_full_marks(self):
        result = simulate_ats(STRONG_CV)
        self.assertEqual(result.score, 100)
        self.assertEqual(result.keyword_coverage, 1.0)
        self.assertEqual(result.section_integrity, 1.0)
        self.assertEqual(result.risks, [])

    def test_empty_text_does_not_raise_and_scores_low(self):
        result = simulate_ats("")
        self.assertEqual(
            result.risks,
            [
                "Missing section: summary",
                "Missing section: experience",
                "Missing section: education",
                "Missing section: skills",
                RISK_SHORT_CV,
                RISK_NO_EMAIL,
                RISK_FEW_DATES,
            ],
        )
        # Only the keyword (no keywords given) and readability budgets survive.
        self.assertEqual(result.score, 45)
        self.assertEqual(result.section_integrity, 0.0)

    def test_missing_skills_section_and_keyword(self):
        result = simulate_ats(NO_SKILLS_CV, ["react"])
        self.assertIn("Missing section: skills", result.risks)
        self.assertIn("Missing keywords: react", result.risks)
        self.assertEqual(result.risks[0], "Missing section: skills")
        self.assertEqual(result.keyword_coverage, 0.0)
        self.assertEqual(result.section_integrity, 0.75)
        self.assertLess(result.score, 60)
        self.assertEqual(result.score, 50)

    def test_section_and_keyword_risks_also_cost_formatting_points(self):
        without_keywords = simulate_ats(NO_SKILLS_CV)
        # 26.25 sections + 35 keywords + (20 - 3) formatting + 10 readability
        self.assertEqual(without_keywords.score, 88)

    def test_keyword_coverage_is_case_insensitive_and_rounded(self):
        result = simulate_ats(STRONG_CV, ["PYTHON", "golang", "scala"])
        self.assertEqual(result.keyword_coverage, 0.33)
        self.assertEqual(result.risks, ["Missing keywords: golang, scala"])
        self.assertEqual(result.score, 74)

    def test_half_points_round_up(self):
        result = simulate_ats(STRONG_CV, ["python", "golang"])
        # 35 + 17.5 + 17 + 10 = 79.5
        self.assertEqual(result.score, 80)

    def test_all_keywords_matched_gives_full_coverage(self):
        result = simulate_ats(STRONG_CV, ["python", "react", "kubernetes"])
        self.assertEqual(result.keyword_coverage, 1.0)
        self.assertEqual(result.risks, [])

    def test_missing_keyword_risk_lists_at_most_five(self):
        keywords = ["alpha", "bravo", "charlie", "delta", "echo", "foxtrot", "golf"]
        result = simulate_ats(STRONG_CV, keywords)
        self.assertEqual(result.keyword_coverage, 0.0)
        self.assertEqual(result.risks, ["Missing keywords: alpha, bravo, charlie, delta, echo"])

    def test_short_cv_with_all_sections(self):
        text = "Summary\nExperience\nEducation\nSkills\njane@example.com 2020 2021"
        result = simulate_ats(text)
        self.assertEqual(result.risks, [RISK_SHORT_CV])
        self.assertEqual(result.score, 97)

    def test_table_layout_detected(self):
        table = "\n".join(["Python\tAdvanced\t5 years\t2019"] * 4)
        result = simulate_ats(STRONG_CV + "\n" + table)
        self.assertIn(RISK_TABLE_LAYOUT, result.risks)

    def test_three_table_lines_are_tolerated(self):
        table = "\n".join(["Python\tAdvanced\t5 years\t2019"] * 3)
        result = simulate_ats(STRONG_CV + "\n" + table)
        self.assertNotIn(RISK_TABLE_LAYOUT, result.risks)

    def test_special_character_density(self):
        result = simulate_ats(STRONG_CV + "\n" + "★" * 200)
        self.assertIn(RISK_SPECIAL_CHARS, result.risks)

    def test_many_short_lines_flag_multi_column_layout(self):
        columns = "\n".join(["Python", "Docker", "AWS", "SQL", "Go", "Rust"] * 3)
        result = simulate_ats(STRONG_CV + "\n" + columns)
        self.assertIn(RISK_MULTI_COLUMN, result.risks)

    def test_long_lines_are_last_risk_and_penalized(self):
        long_line = "word " * 60
        result = simulate_ats(long_line)
        self.assertEqual(result.risks[-1], RISK_LONG_LINES)
        # Readability budget is reduced from 10 to 5.
        self.assertEqual(result.score, 35 + 5)

    def test_scoring_config_does_not_change_scores(self):
        overrides = {"ats": {"weights": {"sections": 0, "keywords": 0}, "risk_penalty_per_item": 20}}
        with patch("careerloop.core.config.scoring._SCORING_CONFIG_CACHE", overrides):
            self.assertEqual(simulate_ats(STRONG_CV).score, 100)
            self.assertEqual(simulate_ats(NO_SKILLS_CV, ["react"]).score, 50)

    def test_is_deterministic(self):
        first = simulate_ats(NO_SKILLS_CV, ["react", "python"])
        second = simulate_ats(NO_SKILLS_CV, ["react", "python"])
        self.assertEqual(first, second)
        self.assertEqual(first.risks, second.risks)


if __name__ == "__main__":
    unittest.main()
