"""Utility helpers for the BoglePay gateway."""
