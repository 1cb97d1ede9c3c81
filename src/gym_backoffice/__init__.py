"""Gym back office package.

Organized by feature modules (clients, memberships, attendance, ...) with a
thin Flask controller layer over service/repository layers.
"""
