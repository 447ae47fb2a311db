# Copyright 2026 APIModel Contributors
# SPDX-License-Identifier: Apache-2.0

"""Sphinx configuration for the APIModel API reference."""

project = "APIModel"
author = "APIModel Contributors"
release = "0.1.0"

# Docstrings follow the Google style.
extensions: list[str] = ["sphinx.ext.autodoc", "sphinx.ext.napoleon"]
autodoc_member_order = "bysource"

html_theme = "alabaster"
