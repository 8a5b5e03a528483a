"""Data structures holding recorded spectra and projected far fields."""
