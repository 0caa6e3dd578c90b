"""Operator maintenance jobs, exposed through the ``realty-admin`` command."""
