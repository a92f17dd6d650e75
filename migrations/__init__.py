"""Data migrations for the JSON collections"""
