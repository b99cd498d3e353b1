"""End-to-end tests driving the ``installconfig`` command line against a temp asset directory."""
