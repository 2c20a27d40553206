def test_imports():
    """
    @brief
    Verifies that all core alloccheck modules are importable.

    @details
    Ensures package structure integrity and confirms that
    alloccheck, alloccheck.dataloader, alloccheck.validator,
    alloccheck.report, alloccheck.export and alloccheck.assist
    are accessible without import errors.
    """
    import alloccheck
    import alloccheck.assist
    import alloccheck.dataloader
    import alloccheck.export.report_export
    import alloccheck.report.query
    import alloccheck.validator

    # --- Assert ---
    # Confirm that modules were successfully imported and resolved
    assert all(
        [
            alloccheck,
            alloccheck.assist,
            alloccheck.dataloader,
            alloccheck.export.report_export,
            alloccheck.report.query,
            alloccheck.validator,
        ]
    )
    assert alloccheck.__version__
