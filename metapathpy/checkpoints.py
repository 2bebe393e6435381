import logging
import os
import pickle


def save_checkpoint(data, filename):
    """Save data to a checkpoint file using pickle."""
    directory = os.path.dirname(filename)
    if directory:
        os.makedirs(directory, exist_ok=True)
    with open(filename, "wb") as f:
        pickle.dump(data, f)
    logging.info(f"Checkpoint saved to {filename}")


def load_checkpoint(filename):
    """Load data from a checkpoint file if it exists; otherwise return None."""
    if os.path.exists(filename):
        logging.info(f"Loading checkpoint from {filename}")
        with open(filename, "rb") as f:
            return pickle.load(f)
    return None
