"""Gestor Financeiro backend: SMS-driven expense tracking."""
