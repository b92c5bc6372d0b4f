"""Supabase-backed persistence."""
