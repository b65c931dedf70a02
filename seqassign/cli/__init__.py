"""Command-line interface for seqassign"""
