"""
forum_admin - admin panel of a simple forum, built on adminkit.
"""
