"""
Collaborator contracts consumed by the core: notifications, sound and display.
"""
