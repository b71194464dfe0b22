"""
Support tickets: the host flow that sends an email and annotates its help-desk thread.
"""
