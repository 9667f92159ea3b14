"""Remote file store domain interfaces"""
