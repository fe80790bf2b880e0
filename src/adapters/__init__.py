"""Adapters: Markdown scanning, syntax checks, rules, HTTP and exporters."""
