"""Tests for medicine_archive. Run: python -m unittest discover medicine_archive/tests"""
