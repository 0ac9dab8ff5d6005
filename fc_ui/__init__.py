"""Terminal front-end for fleetcmd."""
