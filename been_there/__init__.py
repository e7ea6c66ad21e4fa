"""
Been There
----------
Map-based travel check-in game: users drop pins, the server reverse-geocodes
them to a place name, stores visits and ranks travelers and countries.
"""
