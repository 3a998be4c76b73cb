"""Persistent store access (Supabase)."""
from .supabase import CorpusSource, PuzzleSink, StoreError, SupabaseStore, load_corpus

__all__ = ["CorpusSource", "PuzzleSink", "StoreError", "SupabaseStore", "load_corpus"]
