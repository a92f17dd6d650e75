"""Scheduling domain - host availability and appointment booking"""
