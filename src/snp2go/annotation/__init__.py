"""Annotation file parsing: attribute decoding and the gene overlap index."""

from snp2go.annotation.attributes import (
    RECOGNIZED_KEYS,
    DecodedAttributes,
    decode_attributes,
    percent_decode,
    split_multi_value,
)
from snp2go.annotation.models import GENE_HITS_TABLE_NAME, GeneRecord, GenomicInterval
from snp2go.annotation.index import (
    AnnotationIndex,
    ParseReport,
    iter_gene_records,
    open_annotation,
)

__all__ = [
    "RECOGNIZED_KEYS",
    "DecodedAttributes",
    "decode_attributes",
    "percent_decode",
    "split_multi_value",
    "GENE_HITS_TABLE_NAME",
    "GeneRecord",
    "GenomicInterval",
    "AnnotationIndex",
    "ParseReport",
    "iter_gene_records",
    "open_annotation",
]
