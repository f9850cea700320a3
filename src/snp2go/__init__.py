"""snp2go: map SNP variants to nearby genes and test GO term enrichment."""

__version__ = "0.1.0"
