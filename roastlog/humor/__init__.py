"""Phrase bank, phrase table and the annotation orchestrator."""
