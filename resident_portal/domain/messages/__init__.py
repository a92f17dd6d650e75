"""Messages domain - private and group chat"""
