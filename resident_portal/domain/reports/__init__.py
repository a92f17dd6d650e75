"""Reports domain - residents' reports and staff follow-up"""
