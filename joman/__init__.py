# -*- coding: utf-8 -*-
"""joman package.

Modules:
    crypto:    RSA keypair generation and hybrid RSA + AES-GCM encryption.
    errors:    Exception hierarchy.
    logic:     Journal directory, config, and entry management.
    cli:       argparse command line (``joman``).
    ui:        Textual-based journal browser.
    theme.css: Textual CSS theme (loaded by ui.py).
"""

__version__ = "0.4.0"

__all__ = ["crypto", "errors", "logic", "cli", "ui"]
