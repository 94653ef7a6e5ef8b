"""Addressable graphs and their JSON form."""
