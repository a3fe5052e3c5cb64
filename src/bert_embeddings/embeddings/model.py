"""BERT embeddings model container.

Holds the configuration, the vocabulary and the inference engine handle, and
exposes the pipeline-facing `annotate()`:

    DOCUMENT annotations -> sentences -> wordpieces -> engine -> WORD_EMBEDDINGS annotations

Lifecycle:
- config + vocabulary are set at construction or load time
- the engine is attached once, by injection (set_engine) or by load()
- the first get_model() call finalizes the instance; after that config,
  vocabulary and engine can no longer change

Persistence:
- save(path) / load(path): our own layout (see serialization.py)
- load_from_folder(folder): a HuggingFace-style export (engine artifact + vocab.txt)
- pretrained(name): fetched through an injected ResourceDownloader
"""

from __future__ import annotations
from typing import Any, Dict, List, Optional, Sequence, TYPE_CHECKING
import logging
import os
import shutil
import time
import uuid

from .. import __version__
from ..annotations import Annotation, AnnotatorType, pack_embeddings, unpack_sentences
from ..engines.base import InferenceEngine
from ..engines.registry import load_engine
from ..pipeline.context import Sentence, WordpieceTokenizedSentence
from ..tokenizer.bert import BertWordpieceTokenizer
from ..tokenizer.vocab import CLS_TOKEN, SEP_TOKEN, load_vocab, missing_tokens
from ..utils.fingerprint import vocabulary_fingerprint
from .bert import BertEmbeddings
from .config import EmbeddingsConfig
from .serialization import (
    ENGINE_DIR,
    METADATA_FILE,
    VOCABULARY_FILE,
    read_metadata,
    read_vocabulary,
    write_metadata,
    write_vocabulary,
)

if TYPE_CHECKING:
    from ..pretrained.downloader import ResourceDownloader

log = logging.getLogger("bert_embeddings.model")

VOCAB_TXT = "vocab.txt"

def _random_uid(prefix: str) -> str:
    return f"{prefix}_{uuid.uuid4().hex[:12]}"

class BertEmbeddingsModel:
    required_annotator_types = (AnnotatorType.DOCUMENT,)
    annotator_type = AnnotatorType.WORD_EMBEDDINGS

    def __init__(
        self,
        config: Optional[EmbeddingsConfig] = None,
        vocabulary: Optional[Dict[str, int]] = None,
        engine: Optional[InferenceEngine] = None,
        uid: Optional[str] = None,
    ):
        self.uid = uid or _random_uid("BERT_EMBEDDINGS")
        self._config = config or EmbeddingsConfig()
        self._vocabulary: Optional[Dict[str, int]] = dict(vocabulary) if vocabulary is not None else None
        self._engine = engine
        self._model: Optional[BertEmbeddings] = None
        self._tokenizer: Optional[BertWordpieceTokenizer] = None

    # ------------------------------------------------------------------ #
    # configuration
    # ------------------------------------------------------------------ #
    @property
    def config(self) -> EmbeddingsConfig:
        return self._config

    @property
    def vocabulary(self) -> Optional[Dict[str, int]]:
        return self._vocabulary

    @property
    def engine(self) -> Optional[InferenceEngine]:
        return self._engine

    @property
    def is_finalized(self) -> bool:
        return self._model is not None

    def _check_mutable(self, what: str) -> None:
        if self._model is not None:
            raise RuntimeError(
                f"Cannot change {what} of {self.uid}: the inference model is already built. "
                f"Create a new BertEmbeddingsModel instead."
            )

    def set_config(self, config: EmbeddingsConfig) -> "BertEmbeddingsModel":
        self._check_mutable("config")
        self._config = config
        self._tokenizer = None
        return self

    def replace_config(self, **changes: Any) -> "BertEmbeddingsModel":
        return self.set_config(self._config.replace(**changes))

    def set_vocabulary(self, vocabulary: Dict[str, int]) -> "BertEmbeddingsModel":
        self._check_mutable("vocabulary")
        self._vocabulary = dict(vocabulary)
        self._tokenizer = None
        return self

    def set_engine(self, engine: InferenceEngine) -> "BertEmbeddingsModel":
        self._check_mutable("engine")
        self._engine = engine
        return self

    def _require_vocabulary(self) -> Dict[str, int]:
        if self._vocabulary is None:
            raise ValueError("Vocabulary must be set before usage. Use method set_vocabulary() for it.")
        return self._vocabulary

    @property
    def sentence_start_token_id(self) -> int:
        return self._require_vocabulary()[CLS_TOKEN]

    @property
    def sentence_end_token_id(self) -> int:
        return self._require_vocabulary()[SEP_TOKEN]

    # ------------------------------------------------------------------ #
    # inference
    # ------------------------------------------------------------------ #
    def get_model(self) -> BertEmbeddings:
        if self._model is None:
            if self._engine is None:
                raise RuntimeError("Inference engine must be set before usage. Use method set_engine() for it.")
            missing = missing_tokens(self._require_vocabulary())
            if missing:
                raise ValueError(f"Vocabulary is missing required tokens: {missing}")
            self._model = BertEmbeddings(
                self._engine,
                self.sentence_start_token_id,
                self.sentence_end_token_id,
                self._config,
            )
            log.info(f"{self.uid}: inference model ready (config={self._config.to_dict()}, vocab_size={len(self._vocabulary)})")
        return self._model

    def get_tokenizer(self) -> BertWordpieceTokenizer:
        if self._tokenizer is None:
            self._tokenizer = BertWordpieceTokenizer(self._require_vocabulary(), lowercase=self._config.lowercase)
        return self._tokenizer

    def tokenize(self, sentences: Sequence[Sentence]) -> List[WordpieceTokenizedSentence]:
        return self.get_tokenizer().tokenize(sentences)

    def annotate(self, annotations: Sequence[Annotation]) -> List[Annotation]:
        """Takes DOCUMENT annotations (one per sentence) and returns one
        WORD_EMBEDDINGS annotation per token."""
        model = self.get_model()
        sentences = unpack_sentences(annotations)
        tokenized = self.tokenize(sentences)
        return pack_embeddings(model.calculate_embeddings(tokenized))

    # ------------------------------------------------------------------ #
    # persistence
    # ------------------------------------------------------------------ #
    def save(self, path: str, overwrite: bool = False) -> str:
        vocabulary = self._require_vocabulary()
        if os.path.exists(path):
            if not overwrite:
                raise FileExistsError(f"{path} already exists. Pass overwrite=True to replace it.")
            if not os.path.isfile(os.path.join(path, METADATA_FILE)):
                raise ValueError(f"Refusing to overwrite {path}: it is not a saved BertEmbeddingsModel")
            shutil.rmtree(path)
        os.makedirs(path)

        write_vocabulary(os.path.join(path, VOCABULARY_FILE), vocabulary)
        engine_kind = None
        if self._engine is not None:
            engine_kind = self._engine.kind
            self._engine.save(os.path.join(path, ENGINE_DIR))

        write_metadata(os.path.join(path, METADATA_FILE), {
            "class": type(self).__name__,
            "uid": self.uid,
            "version": __version__,
            "timestamp_ms": int(time.time() * 1000),
            "params": self._config.to_dict(),
            "vocabulary_size": len(vocabulary),
            "vocabulary_fingerprint": vocabulary_fingerprint(vocabulary),
            "engine_kind": engine_kind,
        })
        log.info(f"Saved {self.uid} to {path} (engine={engine_kind})")
        return path

    @classmethod
    def load(cls, path: str) -> "BertEmbeddingsModel":
        if not os.path.exists(path):
            raise FileNotFoundError(f"Saved model {path} not found")
        if not os.path.isdir(path):
            raise NotADirectoryError(f"Saved model {path} is not a directory")
        meta_path = os.path.join(path, METADATA_FILE)
        if not os.path.isfile(meta_path):
            raise FileNotFoundError(f"Metadata file {METADATA_FILE} not found in {path}")
        vocab_path = os.path.join(path, VOCABULARY_FILE)
        if not os.path.isfile(vocab_path):
            raise FileNotFoundError(f"Vocabulary file {VOCABULARY_FILE} not found in {path}")

        meta = read_metadata(meta_path)
        if meta.get("class") != cls.__name__:
            raise ValueError(f"{path} holds a {meta.get('class')!r}, not a {cls.__name__}")
        vocabulary = read_vocabulary(vocab_path)
        if vocabulary_fingerprint(vocabulary) != meta.get("vocabulary_fingerprint"):
            raise ValueError(f"Vocabulary in {path} does not match the fingerprint recorded in {METADATA_FILE}")

        config = EmbeddingsConfig.from_dict(meta.get("params") or {})
        engine = None
        engine_kind = meta.get("engine_kind")
        if engine_kind:
            engine = load_engine(engine_kind, os.path.join(path, ENGINE_DIR))

        log.info(f"Loaded {meta.get('uid')} from {path} (engine={engine_kind}, vocab_size={len(vocabulary)})")
        return cls(config=config, vocabulary=vocabulary, engine=engine, uid=meta.get("uid"))

    @classmethod
    def load_from_folder(
        cls,
        folder: str,
        engine_kind: str = "torch_bert",
        config: Optional[EmbeddingsConfig] = None,
    ) -> "BertEmbeddingsModel":
        """Import an exported model: the engine artifact plus `vocab.txt`.

        When no config is given and the engine reports a `hidden_size`, it is
        used as `dim`.
        """
        vocab = os.path.join(folder, VOCAB_TXT)
        if not os.path.exists(folder):
            raise FileNotFoundError(f"Folder {folder} not found")
        if not os.path.isdir(folder):
            raise NotADirectoryError(f"File {folder} is not folder")
        if not os.path.isfile(vocab):
            raise FileNotFoundError(f"Vocabulary file {VOCAB_TXT} not found in folder {folder}")

        engine = load_engine(engine_kind, folder)
        words = load_vocab(vocab)
        if config is None:
            hidden = getattr(engine, "hidden_size", None)
            config = EmbeddingsConfig(dim=int(hidden)) if hidden else EmbeddingsConfig()
        log.info(f"Imported {folder} (engine={engine_kind}, vocab_size={len(words)}, dim={config.dim})")
        return cls(config=config, vocabulary=words, engine=engine)

    @classmethod
    def pretrained(
        cls,
        name: str = "bert_uncased_base",
        lang: Optional[str] = None,
        remote_loc: Optional[str] = None,
        downloader: Optional["ResourceDownloader"] = None,
    ) -> "BertEmbeddingsModel":
        from ..pretrained.downloader import ResourceDownloader
        downloader = downloader or ResourceDownloader()
        local_path = downloader.download(name, lang=lang, remote_loc=remote_loc)
        return cls.load(local_path)
