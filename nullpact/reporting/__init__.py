"""Diagnostic reporting"""
from .reporter import CollectingSink, DiagnosticSink, ViolationReporter

__all__ = ['CollectingSink', 'DiagnosticSink', 'ViolationReporter']
