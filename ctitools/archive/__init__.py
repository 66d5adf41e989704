"""Tar.gz and zip archivers for writing CTI package archives."""