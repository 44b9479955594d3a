# SPDX-License-Identifier: MIT
"""Core types: build context, directives, errors and flag helpers."""
