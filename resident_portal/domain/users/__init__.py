"""User domain - accounts, roles and administration"""
