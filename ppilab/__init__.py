"""PPILab: model evaluation and dynamic forecasting for sector price indices."""
