"""
Tests for the CLI, logging setup, YAML loading and annotation records.
"""

import json
import logging
import os
import sys

import pytest

from bert_embeddings import cli
from bert_embeddings.annotations import Annotation, AnnotatorType, document_annotation
from bert_embeddings.configs.loader import load_yaml
from bert_embeddings.logging_ import setup_logging


@pytest.mark.unit
class TestCli:
    def test_inspect(self, tmp_path, model, monkeypatch, capsys):
        path = model.save(str(tmp_path / "saved"))
        monkeypatch.setattr(sys, "argv", ["bert-embeddings", "inspect", "--path", path])
        cli.main()
        meta = json.loads(capsys.readouterr().out)
        assert meta["uid"] == model.uid
        assert meta["engine_kind"] == "stub"

    def test_import_folder(self, tmp_path, registered_stub, monkeypatch, capsys):
        folder = tmp_path / "export"
        registered_stub().save(str(folder))
        (folder / "vocab.txt").write_text("[UNK]\n[CLS]\n[SEP]\nhello\n", encoding="utf-8")
        out = str(tmp_path / "saved")
        monkeypatch.setattr(sys, "argv", [
            "bert-embeddings", "import-folder", "--folder", str(folder), "--out", out, "--engine", "stub",
        ])
        cli.main()
        assert "Saved" in capsys.readouterr().out
        assert os.path.isfile(os.path.join(out, "metadata.json"))

    def test_requires_command(self, monkeypatch):
        monkeypatch.setattr(sys, "argv", ["bert-embeddings"])
        with pytest.raises(SystemExit):
            cli.main()


@pytest.mark.unit
class TestSupport:
    def test_load_yaml(self, tmp_path):
        path = tmp_path / "cfg.yaml"
        path.write_text("run:\n  run_id: r1\nmodel:\n  batch_size: 4\n", encoding="utf-8")
        assert load_yaml(str(path)) == {"run": {"run_id": "r1"}, "model": {"batch_size": 4}}
        empty = tmp_path / "empty.yaml"
        empty.write_text("", encoding="utf-8")
        assert load_yaml(str(empty)) == {}

    def test_setup_logging(self, tmp_path):
        root = logging.getLogger()
        before, level = list(root.handlers), root.level
        try:
            log_path = setup_logging(out_dir=str(tmp_path), run_id="r1")
            logging.getLogger("bert_embeddings.test").info("hello log")
            for h in root.handlers:
                h.flush()
            assert log_path == os.path.join(str(tmp_path), "logs", "r1.log")
            with open(log_path, encoding="utf-8") as f:
                assert "bert_embeddings.test | hello log" in f.read()
        finally:
            for h in list(root.handlers):
                if h not in before:
                    root.removeHandler(h)
                    h.close()
            root.setLevel(level)

    def test_annotation_dict_round_trip(self):
        a = Annotation(AnnotatorType.WORD_EMBEDDINGS, 0, 4, "hello", {"sentence": "0"}, [1.0, 2.0])
        assert Annotation.from_dict(a.to_dict()) == a

    def test_document_annotation(self):
        a = document_annotation("hello", begin=10, source="x")
        assert (a.begin, a.end, a.result) == (10, 14, "hello")
        assert a.metadata == {"source": "x"}
        assert a.annotator_type == AnnotatorType.DOCUMENT
