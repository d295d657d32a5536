"""Supabase-backed storage for generated discovery documents."""
