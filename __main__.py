"""Pulumi program entrypoint."""
from composer.program import pulumi_program

pulumi_program()
