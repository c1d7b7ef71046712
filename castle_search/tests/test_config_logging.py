"""
Tests for configuration loading and run logging.
"""

import json
import os
import sys
import tempfile
import unittest
from pathlib import Path

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', '..'))

from castle_search.config import (
    SearchConfig, LEMMA_CASES,
    apply_overrides, load_config, search_config_from_dict, cases_from_config,
)
from castle_search.discard import CASTLE_CUTOFF
from castle_search.logging import RunLogger, create_manifest

CONFIG_DIR = Path(__file__).resolve().parent.parent.parent / "configs"


class TestSearchConfig(unittest.TestCase):

    def test_defaults(self):
        config = SearchConfig()
        self.assertEqual(config.castle_cutoff, 5.1)
        self.assertEqual(config.castle_cutoff, CASTLE_CUTOFF)
        self.assertEqual(config.executor, "process")
        self.assertGreaterEqual(config.n_workers, 1)

    def test_serial_uses_one_worker(self):
        self.assertEqual(SearchConfig(executor="serial", workers=8).n_workers, 1)

    def test_invalid(self):
        with self.assertRaises(ValueError):
            SearchConfig(executor="mpi")
        with self.assertRaises(ValueError):
            SearchConfig(workers=0)

    def test_from_dict(self):
        config = search_config_from_dict(
            {"search": {"workers": 3, "executor": "thread", "verbose": True}})
        self.assertEqual(config.workers, 3)
        self.assertEqual(config.executor, "thread")
        self.assertTrue(config.verbose)
        self.assertEqual(search_config_from_dict({}), SearchConfig())

    def test_unknown_option(self):
        with self.assertRaises(ValueError):
            search_config_from_dict({"search": {"depth": 2000}})


class TestCases(unittest.TestCase):

    def test_lemma_cases(self):
        self.assertEqual(len(LEMMA_CASES), 8)
        self.assertEqual(LEMMA_CASES[0], (420, 7))
        self.assertEqual(LEMMA_CASES[1], (31, 6))
        self.assertIn((60060, 4), LEMMA_CASES)

    def test_default_cases(self):
        self.assertEqual(cases_from_config({}), LEMMA_CASES)

    def test_case_forms(self):
        cfg = {"cases": [[4, 4], {"level": 5, "max_length": 3}]}
        self.assertEqual(cases_from_config(cfg), [(4, 4), (5, 3)])


class TestConfigFiles(unittest.TestCase):

    def test_load_yaml(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "cfg.yaml")
            with open(path, "w") as f:
                f.write("search:\n  workers: 2\ncases:\n  - [7, 4]\n")
            cfg = load_config(path)
        self.assertEqual(search_config_from_dict(cfg).workers, 2)
        self.assertEqual(cases_from_config(cfg), [(7, 4)])

    def test_load_empty_yaml(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "empty.yaml")
            open(path, "w").close()
            self.assertEqual(load_config(path), {})

    def test_load_non_mapping(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "list.yaml")
            with open(path, "w") as f:
                f.write("- 1\n- 2\n")
            with self.assertRaises(ValueError):
                load_config(path)

    def test_shipped_configs(self):
        lemma = load_config(str(CONFIG_DIR / "lemma_3_11.yaml"))
        self.assertEqual(cases_from_config(lemma), LEMMA_CASES)
        self.assertEqual(search_config_from_dict(lemma).castle_cutoff, 5.1)

        small = load_config(str(CONFIG_DIR / "local_small.yaml"))
        self.assertEqual(cases_from_config(small)[0], (4, 4))
        self.assertEqual(search_config_from_dict(small).workers, 2)


class TestOverrides(unittest.TestCase):

    def test_quiet_beats_config_verbose(self):
        for name in ("lemma_3_11.yaml", "local_small.yaml"):
            cfg = load_config(str(CONFIG_DIR / name))
            self.assertTrue(search_config_from_dict(cfg).verbose)
            quiet = apply_overrides(cfg, quiet=True)
            self.assertFalse(search_config_from_dict(quiet).verbose)
            self.assertTrue(cfg["search"]["verbose"])

    def test_verbose_by_default(self):
        self.assertTrue(search_config_from_dict(apply_overrides({})).verbose)
        cfg = {"search": {"verbose": False}}
        self.assertFalse(search_config_from_dict(apply_overrides(cfg)).verbose)

    def test_workers_executor_cases(self):
        cfg = apply_overrides({"search": {"workers": 2}}, workers=5,
                              executor="thread", cases=[(31, 6)])
        config = search_config_from_dict(cfg)
        self.assertEqual(config.workers, 5)
        self.assertEqual(config.executor, "thread")
        self.assertEqual(cases_from_config(cfg), [(31, 6)])


class TestRunLogging(unittest.TestCase):

    def test_manifest(self):
        cfg = {"search": {"workers": 2}}
        manifest = create_manifest("run_test", cfg, cases=[(4, 4)], n_workers=2)
        self.assertEqual(manifest.run_id, "run_test")
        self.assertEqual(manifest.n_workers, 2)
        self.assertEqual(len(manifest.config_hash), 16)
        self.assertEqual(
            manifest.config_hash,
            create_manifest("other", cfg, cases=[]).config_hash,
        )
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "sub" / "manifest.json"
            manifest.save(path)
            data = json.loads(path.read_text())
        self.assertEqual(data["cases"], [[4, 4]])
        self.assertEqual(data["config"], cfg)

    def test_logger(self):
        with tempfile.TemporaryDirectory() as tmp:
            with RunLogger(Path(tmp)) as logger:
                logger.log_wave({"level": 10, "j2": 1, "n_survivors": 3})
                logger.log_wave({"level": 10, "j2": 2, "n_survivors": 0})
                logger.log_case({"level": 5, "n_candidates": 3})
                self.assertEqual(logger.summary, {
                    "waves_logged": 2, "cases_logged": 1, "survivors_logged": 3,
                })
            waves = (Path(tmp) / "waves.jsonl").read_text().splitlines()
            cases = (Path(tmp) / "cases.jsonl").read_text().splitlines()
        self.assertEqual(len(waves), 2)
        self.assertEqual(json.loads(waves[1])["j2"], 2)
        self.assertIn("timestamp", json.loads(cases[0]))


if __name__ == "__main__":
    unittest.main()
