"""MudMap command-line subcommands"""
