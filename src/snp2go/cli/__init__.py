"""Command-line interface for snp2go."""
