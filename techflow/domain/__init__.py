"""Business domains - one package per back-office area"""
