#!/usr/bin/env python3
import sys
def eprint(*args, **kwargs): print(*args, file=sys.stderr, **kwargs)

#### Import some standard modules
import os
import re


####################################################################################################
#### SearchEngineParams class
class SearchEngineParams:
    """
    Read a key=value search engine parameter file, as written for MS-GF+ and TopPIC runs.
    Keys are matched case-insensitively; text after '#' is a comment.
    """

    ####################################################################################################
    #### Constructor
    def __init__(self, param_file=None, verbose=0):

        # Set verbosity
        if verbose is None:
            verbose = 0
        self.verbose = verbose

        self.param_file = param_file
        self.parameters = {}
        self.n_lines = 0
        self.status = 'NOT_READ'


    ####################################################################################################
    #### Read the parameter file. Returns 'OK', 'MISSING' or 'EMPTY'
    def read(self):

        if self.param_file is None or self.param_file == '' or not os.path.isfile(self.param_file):
            self.status = 'MISSING'
            return self.status

        self.parameters = {}
        self.n_lines = 0
        with open(self.param_file) as infile:
            for line in infile:
                self.n_lines += 1
                line = line.strip()
                if line == '' or line.startswith('#'):
                    continue
                if '#' in line:
                    line = line[:line.index('#')].strip()
                if '=' not in line:
                    continue
                key, value = line.split('=', 1)
                key = key.strip().lower()
                if key == '':
                    continue

                #### Keys such as DynamicMod may appear many times, so keep all values
                if key not in self.parameters:
                    self.parameters[key] = []
                self.parameters[key].append(value.strip())

        if self.n_lines == 0:
            self.status = 'EMPTY'
        else:
            self.status = 'OK'
        if self.verbose >= 1:
            eprint(f"INFO: Read {len(self.parameters)} parameters from {self.param_file}")
        return self.status


    ####################################################################################################
    #### Return the first value for any of the given key names, else the default
    def get(self, names, default=None):
        if isinstance(names, str):
            names = [ names ]
        for name in names:
            values = self.parameters.get(name.lower())
            if values:
                return values[0]
        return default


    ####################################################################################################
    #### Parse the precursor tolerance, e.g. 20ppm, 0.5Da or 0.5Da,2.5Da
    def get_precursor_mass_tolerance(self, names=None):

        if names is None:
            names = [ 'PrecursorMassTolerance', 'PMTolerance' ]
        tolerance = { 'left': 0.0, 'right': 0.0, 'is_ppm': False }

        value = self.get(names)
        if value is None:
            eprint(f"WARNING: Could not find parameter {names[0]} in {self.param_file}; cannot validate the precursor mass error values")
            return tolerance

        parts = [ part for part in value.split(',') if part.strip() != '' ]
        if len(parts) == 0:
            return tolerance

        left = self.parse_tolerance(parts[0])
        if left is None:
            eprint(f"WARNING: Unrecognized precursor tolerance '{value}' in {self.param_file}")
            return tolerance
        right = left
        if len(parts) > 1:
            parsed_right = self.parse_tolerance(parts[1])
            if parsed_right is not None:
                right = parsed_right

        tolerance['left'] = left['value']
        tolerance['right'] = right['value']
        tolerance['is_ppm'] = left['is_ppm']
        return tolerance


    ####################################################################################################
    @staticmethod
    def parse_tolerance(text):
        text = text.strip().lower()
        match = re.match(r'^([0-9\.eE\+\-]+)\s*(da|ppm)$', text)
        if not match:
            return None
        try:
            value = float(match.group(1))
        except ValueError:
            return None
        return { 'value': value, 'is_ppm': match.group(2) == 'ppm' }


    ####################################################################################################
    #### Return a custom charge carrier mass if the parameter file defines one, else None
    def get_charge_carrier_mass(self):
        value = self.get('ChargeCarrierMass')
        if value is None:
            return None
        try:
            return float(value)
        except ValueError:
            eprint(f"WARNING: ChargeCarrierMass value '{value}' is not a number; using the mass of a proton")
            return None
