"""Clients for the LLM, Supabase and the case vector store."""
