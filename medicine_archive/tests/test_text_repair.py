#!/usr/bin/env python3
"""
Text Reconstruction Tests
=========================

Boundary repair, dictionary splitting, literal fixes and the grammar pass.

Run:
    python -m unittest medicine_archive.tests.test_text_repair
"""

import tempfile
import unittest
from pathlib import Path

from medicine_archive.config import DEFAULT_WORD_LIST
from medicine_archive.text_repair import (
    FALLBACK_WORDS,
    TextReconstructionPipeline,
    load_dictionary,
    parse_word_list,
)

SPACED_SENTENCES = [
    "Paracetamol is a common painkiller used to treat aches and pains.",
    "You can take it with or without food.",
    "Side effects are usually mild and go away after a few days.",
    "Do not take more than 8 tablets in 24 hours.",
    "Talk to your doctor if you're pregnant or breastfeeding.",
    "The injection is usually painless.",
    "Speak to your pharmacist beforehand.",
    "In the meantime, keep taking your medicine.",
    "It can make you feel somewhat drowsy.",
    "Take one tablet a day thereafter.",
    "Accidental overdoses can happen if you are careless.",
]


class TestReconstruct(unittest.TestCase):

    def setUp(self):
        self.packaged = TextReconstructionPipeline.from_word_list(DEFAULT_WORD_LIST)
        self.fallback = TextReconstructionPipeline()

    def test_correctly_spaced_text_unchanged(self):
        for pipeline in (self.packaged, self.fallback):
            for sentence in SPACED_SENTENCES:
                self.assertEqual(pipeline.reconstruct(sentence), sentence)

    def test_boundaries_inserted(self):
        pipeline = TextReconstructionPipeline(dictionary=[])
        self.assertEqual(pipeline.reconstruct("Take it daily.Do not stop"), "Take it daily. Do not stop")
        self.assertEqual(pipeline.reconstruct("tabletsTake them"), "tablets Take them")
        self.assertEqual(pipeline.reconstruct("take2 tablets"), "take 2 tablets")
        self.assertEqual(pipeline.reconstruct("every 4Hours"), "every 4 Hours")
        self.assertEqual(pipeline.reconstruct("Note:take with food"), "Note: take with food")

    def test_nbsp_and_dashes_become_spaces(self):
        pipeline = TextReconstructionPipeline(dictionary=[])
        self.assertEqual(pipeline.reconstruct("cold\u00a0sores"), "cold sores")
        self.assertEqual(pipeline.reconstruct("mild\u2013moderate"), "mild moderate")
        self.assertEqual(pipeline.reconstruct("pain \u2014 or fever"), "pain or fever")

    def test_dictionary_split(self):
        pipeline = TextReconstructionPipeline(dictionary=["sores", "genital", "herpes"])
        self.assertEqual(pipeline.reconstruct("cold soresgenital herpes"), "cold sores genital herpes")

    def test_lead_word_split(self):
        pipeline = TextReconstructionPipeline(dictionary=["herpes", "mouth"])
        self.assertEqual(pipeline.reconstruct("herpeseye infections"), "herpes eye infections")
        self.assertEqual(pipeline.reconstruct("mouthskin problems"), "mouth skin problems")

    def test_dictionary_words_never_split(self):
        pipeline = TextReconstructionPipeline(dictionary=["sores", "out", "without", "hear", "heart"])
        self.assertEqual(pipeline.reconstruct("without"), "without")
        self.assertEqual(pipeline.reconstruct("heart"), "heart")
        self.assertEqual(pipeline.reconstruct("soresheart"), "sores heart")

    def test_compounds_never_split(self):
        pipeline = TextReconstructionPipeline(
            dictionary=["pain", "less", "care", "some", "what", "there", "after", "over", "doses", "mean", "time",
                        "before", "hand"],
        )
        text = "painless careless somewhat thereafter overdoses meantime beforehand"
        self.assertEqual(pipeline.reconstruct(text), text)

    def test_literal_fixes(self):
        pipeline = TextReconstructionPipeline(dictionary=[])
        self.assertEqual(
            pipeline.reconstruct("cold soresgenital herpeseye infections"),
            "cold sores genital herpes eye infections",
        )
        self.assertEqual(pipeline.reconstruct("this medicinehave side effects"), "this medicine have side effects")
        self.assertEqual(pipeline.reconstruct("children aged 12 y ears"), "children aged 12 years")
        self.assertEqual(pipeline.reconstruct("people 65 years oldare"), "people 65 years old are")
        self.assertEqual(pipeline.reconstruct("kidney problemsare rare"), "kidney problems are rare")

    def test_whitespace_collapsed(self):
        pipeline = TextReconstructionPipeline(dictionary=[])
        self.assertEqual(pipeline.reconstruct("  take   with\n\nfood  "), "take with food")

    def test_empty_input(self):
        self.assertEqual(self.fallback.reconstruct(""), "")
        self.assertIsNone(self.fallback.reconstruct(None))


class TestEnhance(unittest.TestCase):

    def setUp(self):
        self.pipeline = TextReconstructionPipeline(dictionary=[])

    def test_missing_period_added(self):
        self.assertEqual(self.pipeline.enhance("take it daily Do not stop"), "take it daily. Do not stop")

    def test_existing_punctuation_kept(self):
        self.assertEqual(self.pipeline.enhance("take it daily. Do not stop"), "take it daily. Do not stop")
        self.assertEqual(self.pipeline.enhance("Important: Do not stop"), "Important: Do not stop")

    def test_comma_before_conjunctive_adverb(self):
        self.assertEqual(
            self.pipeline.enhance("it is rare however it can happen"),
            "it is rare, however it can happen",
        )
        self.assertEqual(self.pipeline.enhance("mild but annoying"), "mild, but annoying")

    def test_contractions(self):
        self.assertEqual(self.pipeline.enhance("its usually fine"), "it's usually fine")
        self.assertEqual(self.pipeline.enhance("if you are unsure"), "if you're are unsure")
        self.assertEqual(self.pipeline.enhance("if you take it"), "if you take it")

    def test_repair_runs_both_passes(self):
        self.assertEqual(
            self.pipeline.repair("take it dailyDo not stop"),
            "take it daily. Do not stop",
        )


class TestWordList(unittest.TestCase):

    def test_parse_word_list(self):
        words = parse_word_list("#skip about\nHeart an\n  Liver\n")
        self.assertEqual(words, frozenset({"about", "heart", "liver"}))

    def test_packaged_word_list(self):
        words = load_dictionary(DEFAULT_WORD_LIST)
        self.assertIn("however", words)
        self.assertIn("breastfeeding", words)
        self.assertGreater(len(words), len(FALLBACK_WORDS))

    def test_missing_word_list_uses_fallback(self):
        with tempfile.TemporaryDirectory() as tmp:
            missing = Path(tmp) / "nope.txt"
            with self.assertLogs("medicine_archive.text", level="WARNING"):
                words = load_dictionary(missing)
        self.assertEqual(words, FALLBACK_WORDS)

        pipeline = TextReconstructionPipeline(words)
        self.assertEqual(pipeline.reconstruct("cold soresgenital herpes"), "cold sores genital herpes")


if __name__ == "__main__":
    unittest.main()
