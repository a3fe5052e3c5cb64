"""bert_embeddings

Wordpiece tokenization + pretrained BERT inference as a dataframe pipeline stage.

Public API surface:
- bert_embeddings.cli.main : CLI entrypoint
- bert_embeddings.embeddings.model.BertEmbeddingsModel : model container (annotate/save/load)
- bert_embeddings.engines : inference engine interface + registry
- bert_embeddings.pipeline.build.build_local / ray_data_build.build_ray_data : run pipeline
- bert_embeddings.pretrained.downloader.ResourceDownloader : fetch published models

The tensor runtime and the distributed dataframe framework are external;
this package only tokenizes, batches and repacks.
"""
__all__ = ["__version__"]
__version__ = "0.2.0"
