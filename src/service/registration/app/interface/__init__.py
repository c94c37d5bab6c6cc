"""Registration application ports"""
