"""
Tests for BertEmbeddingsModel: annotate, lifecycle, save/load and folder import.
"""

import json
import os

import pytest

from bert_embeddings.annotations import Annotation, AnnotatorType, document_annotation
from bert_embeddings.embeddings import BertEmbeddingsModel, EmbeddingsConfig
from bert_embeddings.embeddings.serialization import METADATA_FILE

from conftest import DIM, StubEngine


@pytest.mark.unit
class TestAnnotate:
    """End-to-end from DOCUMENT annotations to WORD_EMBEDDINGS annotations."""

    def test_hello_world(self, model, stub_engine):
        out = model.annotate([document_annotation("hello world")])
        assert [a.result for a in out] == ["hello", "world"]
        assert [(a.begin, a.end) for a in out] == [(0, 4), (6, 10)]
        assert [a.embeddings for a in out] == [[2.0] * DIM, [3.0] * DIM]
        assert all(a.annotator_type == AnnotatorType.WORD_EMBEDDINGS for a in out)
        assert out[0].metadata == {
            "sentence": "0",
            "token": "hello",
            "wordpiece": "hello",
            "pieceId": "2",
            "isWordStart": "true",
        }
        assert stub_engine.calls[0][0].tolist() == [[0, 2, 3, 1]]

    def test_unknown_word(self, model):
        out = model.annotate([document_annotation("hello xyz")])
        assert [a.result for a in out] == ["hello", "xyz"]
        assert out[1].metadata["wordpiece"] == "[UNK]"
        assert out[1].metadata["pieceId"] == "4"
        assert out[1].embeddings == [4.0] * DIM
        assert (out[1].begin, out[1].end) == (6, 8)

    def test_first_piece_vector_per_token(self, config, rich_vocab, stub_engine):
        model = BertEmbeddingsModel(config=config, vocabulary=rich_vocab, engine=stub_engine)
        out = model.annotate([document_annotation("unaffable")])
        assert len(out) == 1
        assert out[0].result == "unaffable"
        assert out[0].metadata["wordpiece"] == "un"
        assert out[0].embeddings == [5.0] * DIM

    def test_sentences_indexed_in_order(self, model):
        docs = [
            document_annotation("hello"),
            Annotation(AnnotatorType.WORD_EMBEDDINGS, 0, 0, "ignored"),
            document_annotation("world", begin=6),
        ]
        out = model.annotate(docs)
        assert [(a.metadata["sentence"], a.result, a.begin) for a in out] == [("0", "hello", 0), ("1", "world", 6)]

    def test_uppercase_input_lowercased(self, model):
        out = model.annotate([document_annotation("HELLO")])
        assert out[0].result == "hello"
        assert out[0].metadata["pieceId"] == "2"


@pytest.mark.unit
class TestLifecycle:
    def test_missing_engine(self, config, vocab):
        model = BertEmbeddingsModel(config=config, vocabulary=vocab)
        with pytest.raises(RuntimeError, match="set_engine"):
            model.get_model()

    def test_missing_boundary_markers(self, config, stub_engine):
        model = BertEmbeddingsModel(config=config, vocabulary={"hello": 0, "[UNK]": 1}, engine=stub_engine)
        with pytest.raises(ValueError, match=r"\[CLS\]"):
            model.get_model()

    def test_missing_vocabulary(self, config, stub_engine):
        with pytest.raises(ValueError, match="set_vocabulary"):
            BertEmbeddingsModel(config=config, engine=stub_engine).get_model()

    def test_boundary_ids(self, model):
        assert model.sentence_start_token_id == 0
        assert model.sentence_end_token_id == 1

    def test_frozen_after_get_model(self, model, vocab):
        model.replace_config(batch_size=3)
        model.get_model()
        assert model.is_finalized
        with pytest.raises(RuntimeError):
            model.set_engine(StubEngine())
        with pytest.raises(RuntimeError):
            model.replace_config(batch_size=1)
        with pytest.raises(RuntimeError):
            model.set_vocabulary(vocab)
        assert model.config.batch_size == 3

    def test_get_model_is_cached(self, model):
        assert model.get_model() is model.get_model()

    def test_vocabulary_copied(self, config, vocab, stub_engine):
        model = BertEmbeddingsModel(config=config, vocabulary=vocab, engine=stub_engine)
        vocab["extra"] = 99
        assert "extra" not in model.vocabulary


@pytest.mark.unit
class TestSaveLoad:
    """Persistence layout and round trips."""

    def test_round_trip(self, tmp_path, model, registered_stub):
        path = str(tmp_path / "saved")
        model.save(path)
        assert os.path.isfile(os.path.join(path, METADATA_FILE))
        assert os.path.isfile(os.path.join(path, "fields", "vocabulary.parquet"))
        assert os.path.isdir(os.path.join(path, "bert_engine"))

        loaded = BertEmbeddingsModel.load(path)
        assert loaded.uid == model.uid
        assert loaded.config == model.config
        assert loaded.vocabulary == model.vocabulary
        assert isinstance(loaded.engine, StubEngine)
        out = loaded.annotate([document_annotation("hello world")])
        assert [a.embeddings for a in out] == [[2.0] * DIM, [3.0] * DIM]

    def test_metadata_contents(self, tmp_path, model):
        path = str(tmp_path / "saved")
        model.save(path)
        with open(os.path.join(path, METADATA_FILE), encoding="utf-8") as f:
            meta = json.load(f)
        assert meta["class"] == "BertEmbeddingsModel"
        assert meta["engine_kind"] == "stub"
        assert meta["vocabulary_size"] == 5
        assert meta["params"] == model.config.to_dict()

    def test_save_without_engine(self, tmp_path, config, vocab):
        path = str(tmp_path / "saved")
        BertEmbeddingsModel(config=config, vocabulary=vocab).save(path)
        loaded = BertEmbeddingsModel.load(path)
        assert loaded.engine is None
        assert loaded.vocabulary == vocab

    def test_overwrite(self, tmp_path, model):
        path = str(tmp_path / "saved")
        model.save(path)
        with pytest.raises(FileExistsError):
            model.save(path)
        model.save(path, overwrite=True)

    def test_refuses_to_overwrite_foreign_directory(self, tmp_path, model):
        foreign = tmp_path / "data"
        foreign.mkdir()
        (foreign / "keep.txt").write_text("x")
        with pytest.raises(ValueError):
            model.save(str(foreign), overwrite=True)
        assert (foreign / "keep.txt").exists()

    def test_load_errors(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            BertEmbeddingsModel.load(str(tmp_path / "missing"))
        f = tmp_path / "file"
        f.write_text("x")
        with pytest.raises(NotADirectoryError):
            BertEmbeddingsModel.load(str(f))
        with pytest.raises(FileNotFoundError, match=METADATA_FILE):
            BertEmbeddingsModel.load(str(tmp_path))

    def test_fingerprint_mismatch(self, tmp_path, model):
        path = str(tmp_path / "saved")
        model.save(path)
        meta_path = os.path.join(path, METADATA_FILE)
        with open(meta_path, encoding="utf-8") as f:
            meta = json.load(f)
        meta["vocabulary_fingerprint"] = "0" * 64
        with open(meta_path, "w", encoding="utf-8") as f:
            json.dump(meta, f)
        with pytest.raises(ValueError, match="fingerprint"):
            BertEmbeddingsModel.load(path)

    def test_unknown_engine_kind(self, tmp_path, model):
        path = str(tmp_path / "saved")
        model.save(path)
        # "stub" is not registered here
        with pytest.raises(ValueError, match="Unknown engine kind"):
            BertEmbeddingsModel.load(path)


@pytest.mark.unit
class TestLoadFromFolder:
    def _export(self, tmp_path, lines):
        folder = tmp_path / "export"
        StubEngine().save(str(folder))
        (folder / "vocab.txt").write_text("\n".join(lines) + "\n", encoding="utf-8")
        return str(folder)

    def test_import(self, tmp_path, registered_stub):
        folder = self._export(tmp_path, ["[PAD]", "[UNK]", "[CLS]", "[SEP]", "hello"])
        config = EmbeddingsConfig(dim=DIM)
        model = BertEmbeddingsModel.load_from_folder(folder, engine_kind="stub", config=config)
        assert model.vocabulary == {"[PAD]": 0, "[UNK]": 1, "[CLS]": 2, "[SEP]": 3, "hello": 4}
        assert model.sentence_start_token_id == 2
        out = model.annotate([document_annotation("hello")])
        assert out[0].embeddings == [4.0] * DIM

    def test_default_config_without_hidden_size(self, tmp_path, registered_stub):
        folder = self._export(tmp_path, ["[UNK]", "[CLS]", "[SEP]"])
        model = BertEmbeddingsModel.load_from_folder(folder, engine_kind="stub")
        assert model.config == EmbeddingsConfig()

    def test_missing_folder(self, tmp_path):
        with pytest.raises(FileNotFoundError, match="not found"):
            BertEmbeddingsModel.load_from_folder(str(tmp_path / "nope"))

    def test_file_instead_of_folder(self, tmp_path):
        f = tmp_path / "model.bin"
        f.write_text("x")
        with pytest.raises(NotADirectoryError, match="is not folder"):
            BertEmbeddingsModel.load_from_folder(str(f))

    def test_missing_vocab(self, tmp_path):
        with pytest.raises(FileNotFoundError, match="vocab.txt"):
            BertEmbeddingsModel.load_from_folder(str(tmp_path))
