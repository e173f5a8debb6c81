"""Analysis modules"""
