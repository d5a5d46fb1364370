"""Test suite for simplechat.

Unit tests live under unit/ and are collected by the rules in conftest.py.
Shared fakes for the engine and chat templates live in the helpers/
subpackage.
"""
