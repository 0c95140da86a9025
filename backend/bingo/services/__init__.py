"""Bingo actions and card checks shared by the HTTP routes and the
Socket.IO gateway. Nothing here touches Flask or Socket.IO directly.
"""
