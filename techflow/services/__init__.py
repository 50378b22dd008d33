"""Cross-domain services: storage, notifications, PDF rendering"""
