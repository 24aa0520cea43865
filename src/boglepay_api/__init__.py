"""FastAPI application exposing the BoglePay gateway endpoints."""
