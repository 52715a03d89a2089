"""Core architecture graph and diff data model."""