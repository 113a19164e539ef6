# interactive_visualizations.py

import logging
import plotly.express as px

from config import BRAND_COL, FUEL_TYPE_COL, MILEAGE_COL, MODEL_COL, PRICE_COL, YEAR_COL
from utils import save_plotly_fig


def interactive_visualizations(data, plot_dir):
    """Create interactive visualizations using Plotly."""
    logging.info("Creating interactive visualizations...")
    try:
        required_cols = {MILEAGE_COL, PRICE_COL, FUEL_TYPE_COL}
        if not required_cols.issubset(data.columns):
            missing = required_cols - set(data.columns)
            logging.warning(f"Cannot create price-vs-mileage plot; missing columns: {missing}.")
            return None

        hover = [c for c in (BRAND_COL, MODEL_COL, YEAR_COL) if c in data.columns]
        fig = px.scatter(
            data,
            x=MILEAGE_COL,
            y=PRICE_COL,
            color=FUEL_TYPE_COL,
            opacity=0.5,
            template='plotly_white',
            title='Price vs. Mileage by Fuel Type',
            hover_data=hover,
        )
        fig.update_layout(xaxis_title='Mileage (km)', yaxis_title='Price')
        path = save_plotly_fig(fig, 'price_vs_mileage_interactive', plot_dir)

        logging.info("Interactive visualizations created successfully.")
        return path
    except Exception as e:
        logging.error(f"Error creating interactive visualizations: {e}")
        return None
