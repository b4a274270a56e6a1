"""FluoTitre — reporter coverage quantification and relative viral titre."""
