"""
Tests for the transformers-backed engine with a tiny randomly initialised BERT.

Skipped when the torch extra is not installed.
"""

import numpy as np
import pytest

torch = pytest.importorskip("torch")
transformers = pytest.importorskip("transformers")

from bert_embeddings.annotations import document_annotation  # noqa: E402
from bert_embeddings.embeddings import BertEmbeddingsModel, pad_batch  # noqa: E402
from bert_embeddings.engines.torch_bert import TorchBertEngine  # noqa: E402

HIDDEN = 8
VOCAB_LINES = ["[PAD]", "[UNK]", "[CLS]", "[SEP]", "hello", "world", "##s"]


@pytest.fixture
def tiny_engine():
    torch.manual_seed(0)
    cfg = transformers.BertConfig(
        vocab_size=len(VOCAB_LINES),
        hidden_size=HIDDEN,
        num_hidden_layers=1,
        num_attention_heads=2,
        intermediate_size=16,
        max_position_embeddings=32,
    )
    return TorchBertEngine(transformers.BertModel(cfg), device="cpu")


@pytest.mark.unit
class TestTorchBertEngine:
    def test_infer_shape(self, tiny_engine):
        ids, mask = pad_batch([[2, 4, 3], [2, 3]])
        out = tiny_engine.infer(ids, mask, HIDDEN)
        assert out.shape == (2, 3, HIDDEN)
        assert out.dtype == np.float32

    def test_dim_mismatch(self, tiny_engine):
        ids, mask = pad_batch([[2, 3]])
        with pytest.raises(ValueError, match="hidden_size"):
            tiny_engine.infer(ids, mask, HIDDEN * 2)

    def test_save_and_import_folder(self, tmp_path, tiny_engine):
        folder = tmp_path / "export"
        tiny_engine.save(str(folder))
        (folder / "vocab.txt").write_text("\n".join(VOCAB_LINES) + "\n", encoding="utf-8")

        model = BertEmbeddingsModel.load_from_folder(str(folder))
        assert model.config.dim == HIDDEN
        out = model.annotate([document_annotation("hello worlds")])
        assert [a.result for a in out] == ["hello", "worlds"]
        assert all(len(a.embeddings) == HIDDEN for a in out)

        saved = model.save(str(tmp_path / "saved"))
        reloaded = BertEmbeddingsModel.load(saved)
        again = reloaded.annotate([document_annotation("hello worlds")])
        np.testing.assert_allclose(
            [a.embeddings for a in again], [a.embeddings for a in out], rtol=1e-5, atol=1e-5
        )
