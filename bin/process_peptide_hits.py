#!/usr/bin/env python3

import sys
import os
import argparse
import multiprocessing
import json
from datetime import datetime
import timeit
def eprint(*args, **kwargs): print(*args, file=sys.stderr, **kwargs)
sys.path.append(os.path.dirname(os.path.realpath(__file__))+"/../lib")
from msgfplus_results_processor import MSGFPlusResultsProcessor
from toppic_results_processor import TopPICResultsProcessor


####################################################################################################
#### Guess the search tool from the file name
def detect_tool(filename):
    if 'toppic' in os.path.basename(filename).lower():
        return 'toppic'
    return 'msgfplus'


####################################################################################################
#### Process one results file
def process_job(job):

    if job['tool'] == 'toppic':
        processor = TopPICResultsProcessor(options=job['options'], verbose=job['verbose'])
    else:
        processor = MSGFPlusResultsProcessor(options=job['options'], verbose=job['verbose'])

    processor.process_file(job['filename'])
    return { 'filename': job['filename'], 'tool': job['tool'], 'summary': processor.get_summary() }


####################################################################################################
#### Main function for command-line usage
def main():

    argparser = argparse.ArgumentParser(description='Convert MS-GF+ / MSGFDB and TopPIC search results into synopsis and first-hits files')
    argparser.add_argument('--tool', action='store', choices=[ 'msgfplus', 'toppic' ], help='Search tool that created the files (defaults to a guess from each file name)')
    argparser.add_argument('--param_file', action='store', help='Search tool parameter file with the modification definitions')
    argparser.add_argument('--fasta_file', action='store', help='FASTA file used for the search, for choosing the first-hits protein')
    argparser.add_argument('--output_dir', action='store', help='Directory for the output files (defaults to the directory of each input file)')
    argparser.add_argument('--skip_fht', action='count', help='If set, do not write the first-hits file')
    argparser.add_argument('--skip_syn', action='count', help='If set, do not write the synopsis file')
    argparser.add_argument('--evalue_threshold', action='store', type=float, help='MS-GF+ synopsis EValue threshold (default 0.75)')
    argparser.add_argument('--spec_evalue_threshold', action='store', type=float, help='MS-GF+ synopsis SpecEValue threshold (default 5E-7)')
    argparser.add_argument('--qvalue_threshold', action='store', type=float, help='MS-GF+ synopsis QValue threshold (default 0.01)')
    argparser.add_argument('--pvalue_threshold', action='store', type=float, help='TopPIC synopsis P-value threshold (default 0.95)')
    argparser.add_argument('--summary_file', action='store', help='If set, write a JSON summary of the warnings, errors and counts of each file')
    argparser.add_argument('--n_threads', action='store', type=int, help='Set the number of files to process in parallel (defaults to number of cores)')
    argparser.add_argument('--verbose', action='count', help='If set, print more information about ongoing processing' )
    argparser.add_argument('--version', action='version', version='%(prog)s 0.5')
    argparser.add_argument('files', type=str, nargs='+', help='Filenames of one or more search results files to read')
    params = argparser.parse_args()

    #### Set verbose level
    verbose = params.verbose
    if verbose is None:
        verbose = 0
    if verbose >= 1:
        timestamp = str(datetime.now().isoformat())
        eprint(f"INFO: Launching peptide hit processing at {timestamp}")
    t0 = timeit.default_timer()

    #### Loop over all the files to ensure that they are really there before starting work
    for file in params.files:
        if not os.path.isfile(file):
            eprint(f"ERROR: File '{file}' not found or not a file")
            return 1
    n_files = len(params.files)

    options = {
        'search_tool_parameter_file': params.param_file,
        'fasta_file': params.fasta_file,
        'output_directory': params.output_dir,
        'create_first_hits_file': not params.skip_fht,
        'create_synopsis_file': not params.skip_syn,
        'msgfplus_synopsis_evalue_threshold': params.evalue_threshold,
        'msgfplus_synopsis_spec_evalue_threshold': params.spec_evalue_threshold,
        'msgfplus_synopsis_qvalue_threshold': params.qvalue_threshold,
        'toppic_synopsis_pvalue_threshold': params.pvalue_threshold,
    }

    jobs = []
    for file in params.files:
        tool = params.tool
        if tool is None:
            tool = detect_tool(file)
        jobs.append({ 'filename': file, 'tool': tool, 'options': options, 'verbose': verbose })

    #### Compute how many files in parallel to process
    n_threads = params.n_threads
    if n_threads is None or n_threads <= 0:
        n_threads = min(multiprocessing.cpu_count(), n_files)

    if n_threads == 1:
        results = [ process_job(job) for job in jobs ]
    else:
        eprint(f"INFO: Processing {n_threads} files in parallel with multiprocessing (one file per CPU)")
        pool = multiprocessing.Pool(processes=n_threads)
        async_results = pool.map_async(process_job, jobs)
        pool.close()
        pool.join()
        results = async_results.get()

    #### Report and optionally store the outcome of each file
    n_failed = 0
    for result in results:
        state = result['summary']['state']
        if state['status'] != 'OK':
            n_failed += 1
            eprint(f"ERROR: {result['filename']}: [{state['code']}]: {state['message']}")
        elif verbose >= 1:
            eprint(f"INFO: {result['filename']}: {result['summary']['counts']}")

    if params.summary_file:
        with open(params.summary_file, 'w') as outfile:
            json.dump({ result['filename']: result['summary'] for result in results }, outfile, indent=2, sort_keys=True)

    if verbose >= 1:
        timestamp = str(datetime.now().isoformat())
        t1 = timeit.default_timer()
        eprint(f"INFO: Processed {n_files} files in {t1-t0:.2f} seconds at {timestamp}")

    if n_failed > 0:
        return 1
    return 0


if __name__ == "__main__": sys.exit(main())
