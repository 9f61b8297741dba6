#!/usr/bin/env python3
"""
SubBurn Entry Point Script

Runs one command: generate a subtitled video, export subtitles, or segment
a saved transcript.
"""

from subburn.cli import CLIHandler

if __name__ == "__main__":
    cli = CLIHandler()
    cli.run()
