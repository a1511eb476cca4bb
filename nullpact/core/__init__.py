"""Core models, configuration and the checking pipeline"""
