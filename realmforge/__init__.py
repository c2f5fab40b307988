"""Sorcery: Contested Realm deck builder."""
