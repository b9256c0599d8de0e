"""Routers package"""
