"""Outbound notification domain interfaces"""
