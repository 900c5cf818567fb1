"""Conversions between the OpenAI Chat Completions format and NVIDIA NIM."""
