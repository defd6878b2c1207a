"""
Dispatch API: cron trigger, schedule reads and health probes.
"""
