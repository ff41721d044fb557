"""Command-line front end for issuegate"""
