"""PSVault Client Meta information.
   PSVault keeps password-manager secrets encrypted on the client side.
"""
__title__ = 'psvault'
__description__ = (
   'Client-side envelope encryption and session unlock state '
   'for the PSVault password manager.'
)
__version__ = '0.3.0'
__copyright__ = 'Copyright (c) 2026 PSVault Developers'
__author__ = 'PSVault Developers'
__author_email__ = 'dev@psvault.io'
__license__ = 'Apache-2.0'
__url__ = 'https://github.com/psvault/psvault-client'
