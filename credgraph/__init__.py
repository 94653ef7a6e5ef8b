"""Explainable PageRank cred scores over addressable graphs."""
